# Infrastructure Adapters Package
from .card_record import dump_deck, from_record, load_deck, to_record

__all__ = ["to_record", "from_record", "load_deck", "dump_deck"]
