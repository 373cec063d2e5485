"""Card view model and raster preview."""

from transit_card.rendering.composer import compose_card
from transit_card.rendering.emulator import save_frame
from transit_card.rendering.view_model import CardView, DepartureRow, DisturbanceRow, SourceView, build_card_view

__all__ = [
    "CardView",
    "DepartureRow",
    "DisturbanceRow",
    "SourceView",
    "build_card_view",
    "compose_card",
    "save_frame",
]
