from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class Combinator(str, Enum):
    AND = "AND"
    OR = "OR"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"


class Predicate(BaseModel):
    """A single field/operator/value test against the trigger data.

    ``operator`` is kept as a plain string so rules with an operator we do not
    know can still be stored; the evaluator treats those as non-matching.
    """

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    operator: str
    value: Any = None

    @property
    def known_operator(self) -> ConditionOperator | None:
        try:
            return ConditionOperator(self.operator)
        except ValueError:
            return None


class ConditionTree(BaseModel):
    """AND/OR combinator over a flat list of predicates.

    Also accepts the legacy ``{"type": "AND", "rules": [...]}`` shape.
    In that shape anything other than an AND type, including no type at
    all, combines with OR.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    combinator: Combinator = Field(
        default=Combinator.AND,
        validation_alias=AliasChoices("combinator", "type"),
    )
    predicates: list[Predicate] = Field(
        default_factory=list,
        validation_alias=AliasChoices("predicates", "rules"),
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_legacy_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "combinator" in data or "predicates" in data:
            return data
        if "type" not in data and "rules" not in data:
            return data

        legacy_type = data.get("type")
        is_and = isinstance(legacy_type, str) and legacy_type.upper() == Combinator.AND.value
        return {
            "combinator": Combinator.AND if is_and else Combinator.OR,
            "predicates": data.get("rules"),
        }

    @field_validator("combinator", mode="before")
    @classmethod
    def normalize_combinator(cls, value: Any) -> Any:
        if value is None:
            return Combinator.AND
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("predicates", mode="before")
    @classmethod
    def default_predicates(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_empty(self) -> bool:
        return not self.predicates
