"""Pydantic model for the DS9 ``global`` style defaults.

The export header always carries one ``global`` line.  Only color and
font are configurable; the edit flags mirror DS9's own defaults.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Ds9GlobalProperties(BaseModel):
    """Style defaults written to the ``global`` header line.

    Attributes:
        color: Default region color.
        font: Default text font, written quoted.
        delete_region: Regions may be deleted.
        edit_region: Regions may be edited.
        fixed_region: Regions are fixed in place.
        highlite_region: Selected regions are highlighted.
        include_region: Regions are include (not exclude) regions.
        move_region: Regions may be moved.
        select_region: Regions may be selected.
    """

    color: str = Field(default="green", min_length=1)
    font: str = Field(default="helvetica 10 normal roman", min_length=1)
    delete_region: bool = True
    edit_region: bool = True
    fixed_region: bool = False
    highlite_region: bool = True
    include_region: bool = True
    move_region: bool = True
    select_region: bool = True

    def to_global_line(self) -> str:
        """Render as a DS9 ``global key=value ...`` line (no newline)."""
        return (
            f"global color={self.color}"
            f" delete={int(self.delete_region)}"
            f" edit={int(self.edit_region)}"
            f" fixed={int(self.fixed_region)}"
            f' font="{self.font}"'
            f" highlite={int(self.highlite_region)}"
            f" include={int(self.include_region)}"
            f" move={int(self.move_region)}"
            f" select={int(self.select_region)}"
        )
