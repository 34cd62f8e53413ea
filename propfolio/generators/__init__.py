"""Sample data generators."""

from propfolio.generators.base import BaseGenerator
from propfolio.generators.property import PropertyDraftGenerator

__all__ = ["BaseGenerator", "PropertyDraftGenerator"]
