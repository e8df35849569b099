"""Declares no __all__, so catalogs expose nothing from here."""

from __future__ import annotations

from nef_core import export


@export("unlisted")
class UnlistedService:
    pass
