from typing import Any, Dict

from synth.rng import SeededRandom
from synth.schemas import EventSchema


class EventSynthesizer:
    """Binds one worker's rng to its schema. Not thread-safe: call from the loop thread."""
    def __init__(self, schema: EventSchema, rng: SeededRandom):
        self.schema = schema
        self.rng = rng
        self.generated = 0

    def synthesize(self) -> Dict[str, Any]:
        self.generated += 1
        return self.schema.synthesize(self.rng)
