"""Structured query predicates rendered as Elasticsearch query clauses.

Each query against the index uses exactly one predicate:

* ``GeoRadius`` – documents whose geo point lies within a great-circle
  distance (kilometres) of a centre point.
* ``NumericRange`` – documents whose numeric field satisfies a comparison.
* ``TermEquals`` – exact match on a keyword field.
"""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, Field

RangeOperator = Literal["gte", "gt", "lte", "lt"]


class Predicate(BaseModel, ABC):
    field: str = Field(..., min_length=1, description="Document field the predicate applies to")

    @abstractmethod
    def to_query(self) -> dict:
        """Render the predicate as an Elasticsearch query clause."""
        ...


class GeoRadius(Predicate):
    lat: float
    lon: float
    distance_km: float = Field(..., gt=0)

    def to_query(self) -> dict:
        return {
            "geo_distance": {
                "distance": f"{self.distance_km}km",
                "distance_type": "arc",
                self.field: {"lat": self.lat, "lon": self.lon},
            }
        }


class NumericRange(Predicate):
    operator: RangeOperator = "gte"
    threshold: float

    def to_query(self) -> dict:
        return {"range": {self.field: {self.operator: self.threshold}}}


class TermEquals(Predicate):
    value: str

    def to_query(self) -> dict:
        return {"term": {self.field: self.value}}
