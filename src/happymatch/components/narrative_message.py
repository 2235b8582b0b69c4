from dataclasses import dataclass

@dataclass(slots=True)
class NarrativeMessage:
    status: str = ""
    text: str = ""
