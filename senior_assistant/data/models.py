from dataclasses import dataclass, field
from typing import List


@dataclass
class Recipe:
    name: str
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict) -> "Recipe":
        """
        Build a recipe from the generated JSON object
        ({'recipeName', 'ingredients', 'instructions'}).

        Raises ValueError when a field is missing or has the wrong type,
        so no half-filled recipe ever leaves this method.
        """
        if not isinstance(data, dict):
            raise ValueError("Recipe payload is not an object")

        name = data.get('recipeName')
        ingredients = data.get('ingredients')
        instructions = data.get('instructions')

        if not isinstance(name, str) or not name.strip():
            raise ValueError("Recipe payload has no recipeName")
        for label, items in (('ingredients', ingredients), ('instructions', instructions)):
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                raise ValueError(f"Recipe payload has invalid {label}")

        return cls(name=name.strip(), ingredients=list(ingredients), instructions=list(instructions))


@dataclass
class Message:
    recipient: str
    text: str
    type: str = 'sent'


@dataclass
class Reminder:
    id: int
    text: str
    completed: bool = False


@dataclass
class MedicationRequest:
    medication_name: str
    dosage: str
    frequency: str
    date: str  # Request day, dd/mm/yyyy


@dataclass
class Appointment:
    id: int
    doctor_name: str
    appointment_date: str
    appointment_time: str


@dataclass
class Hospital:
    name: str
    address: str
    distance: str
    phone: str


@dataclass
class Activity:
    title: str
    when: str
