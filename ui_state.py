from enum import Enum, auto

class UIState(Enum):
    MENU = auto()
    SOLUTION = auto()
    ALGORITHM_VIEW = auto()

class AppState:
    def __init__(self):
        self.current_state = UIState.MENU
