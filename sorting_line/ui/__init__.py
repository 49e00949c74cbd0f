from sorting_line.ui.base import BaseUI, Control, Status, UIHandlers
from sorting_line.ui.console import ConsoleUI

__all__ = [
    'BaseUI',
    'Control',
    'Status',
    'UIHandlers',
    'ConsoleUI',
]
