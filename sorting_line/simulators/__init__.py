from sorting_line.simulators.base_simulator import BaseSimulator
from sorting_line.simulators.sorting_simulator import SortingSimulator

__all__ = [
    'BaseSimulator',
    'SortingSimulator',
]
