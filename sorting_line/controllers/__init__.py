from sorting_line.controllers.app_controller import AppController, AppState

__all__ = [
    'AppController',
    'AppState',
]
