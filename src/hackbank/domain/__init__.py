"""Domain layer of the hackbank economy.

Holds the pieces that are independent of persistence:

* Enumerations shared by models and services (see :mod:`enums`).
* Typed business errors (see :mod:`errors`).
* The economy rule set with prices and multipliers (see :mod:`rules_config`).
"""

from . import enums, errors, rules_config

__all__ = ["enums", "errors", "rules_config"]
