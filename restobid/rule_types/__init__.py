# Ensure registration happens by importing modules
from .base import Rule, RuleResult, rule_registry  # noqa
from . import (  # noqa
    line_item,
    flood_cut,
    drying_equipment,
)
