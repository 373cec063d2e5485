"""Render a preview frame from a JSON file of host entity states."""

from __future__ import annotations

import argparse
import json
from typing import Any

import yaml

from transit_card.card import TransportCard
from transit_card.config import stub_config
from transit_card.rendering import CardView, compose_card, save_frame


def _load_states(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object of entity states")
    return data


def _load_card_config(path: str | None) -> dict[str, Any]:
    if path is None:
        return stub_config()
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if not isinstance(data, dict):
        raise ValueError("Card config must contain a mapping at the top level")
    return data.get("card", data)


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("states", help="JSON file mapping entity ids to states")
    parser.add_argument("--config", help="YAML card config (defaults to the stub config)")
    parser.add_argument("--output", default="preview_output/card.png", help="Output PNG path")
    parser.add_argument(
        "--expand",
        action="append",
        default=[],
        help="Source id whose disturbances are shown expanded (repeatable)",
    )
    args = parser.parse_args()

    frames: list[CardView] = []
    card = TransportCard(renderer=frames.append)
    card.set_config(_load_card_config(args.config))
    card.update_from_states(_load_states(args.states))
    for source_id in args.expand:
        card.toggle_expanded(source_id)

    view = card.current_view()
    if view is None:
        raise SystemExit("Nothing to render")
    output = save_frame(compose_card(view), args.output)
    print(f"Rendered {len(view.sources)} source(s) to {output} ({len(frames)} render(s))")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
