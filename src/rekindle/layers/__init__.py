"""
Layered configuration model.

Layers are named units of configuration held in an ordered list where the
first layer has the highest precedence.
"""

from rekindle.layers.environment import Environment
from rekindle.layers.sources import (
    DuplicateLayerError,
    LayerError,
    LayerSources,
    UnknownLayerError,
)
from rekindle.layers.types import (
    CompositeLayer,
    Layer,
    LayerEnumerationError,
    LookupLayer,
    MappingLayer,
)

__all__ = [
    "CompositeLayer",
    "DuplicateLayerError",
    "Environment",
    "Layer",
    "LayerEnumerationError",
    "LayerError",
    "LayerSources",
    "LookupLayer",
    "MappingLayer",
    "UnknownLayerError",
]
