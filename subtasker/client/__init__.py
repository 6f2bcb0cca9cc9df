from .api import TaskClient
from .preferences import PreferenceFile
from .state import AppStore

__all__ = ["AppStore", "PreferenceFile", "TaskClient"]
