"""Action handlers bound to keys by ``flatvim.keymaps.defaults``."""

from . import core, edit, insert, motion, repeat, visual

__all__ = ["core", "edit", "insert", "motion", "repeat", "visual"]
