"""Waste items, processed records and the sorting catalogue"""

import time
import uuid
from dataclasses import asdict, dataclass

# Category -> sample item names. Every category has one bin of the same name.
CATALOGUE = {
    'PLASTIC': ['Plastic Bottle', 'Yogurt Cup', 'Shampoo Bottle', 'Food Tray'],
    'PAPER':   ['Newspaper', 'Cardboard Box', 'Paper Bag', 'Magazine'],
    'GLASS':   ['Wine Bottle', 'Jam Jar', 'Glass Cup'],
    'METAL':   ['Soda Can', 'Tin Can', 'Aluminium Foil', 'Bottle Cap'],
    'ORGANIC': ['Banana Peel', 'Apple Core', 'Coffee Grounds', 'Eggshells'],
}

BINS = tuple(CATALOGUE)


def now_ms():
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class WasteItem:
    """One synthetic item travelling down the belt."""
    item_id: str
    name: str
    category: str

    @classmethod
    def create(cls, name, category):
        return cls(item_id=uuid.uuid4().hex[:12], name=name, category=category)


@dataclass(frozen=True)
class ProcessedRecord:
    """
    Outcome of one item's journey through the sorter.

    Never mutated after creation; the local store and the MQTT payload both
    use the dict shape from to_dict().
    """
    record_id: str
    timestamp: int          # epoch milliseconds
    item_id: str
    item_name: str
    category: str
    sorted_to: str
    is_correct: bool
    fault_injected: bool
    device: str = 'UNKNOWN'

    @classmethod
    def from_item(cls, item, sorted_to, fault_injected, timestamp, device='UNKNOWN'):
        return cls(
            record_id=uuid.uuid4().hex,
            timestamp=int(timestamp),
            item_id=item.item_id,
            item_name=item.name,
            category=item.category,
            sorted_to=sorted_to,
            is_correct=(sorted_to == item.category),
            fault_injected=bool(fault_injected),
            device=device,
        )

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        """Build a record from a decoded dict; raises KeyError/ValueError/TypeError on bad input."""
        if not isinstance(data, dict):
            raise TypeError(f"record must be an object, got {type(data).__name__}")
        return cls(
            record_id=str(data['record_id']),
            timestamp=int(data['timestamp']),
            item_id=str(data['item_id']),
            item_name=str(data['item_name']),
            category=str(data['category']),
            sorted_to=str(data['sorted_to']),
            is_correct=bool(data['is_correct']),
            fault_injected=bool(data.get('fault_injected', False)),
            device=str(data.get('device', 'UNKNOWN')),
        )
