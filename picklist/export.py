from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd
from loguru import logger

from .config import PickListOrder

PICK_LIST_COLUMNS = ["order_number", "name", "location", "image"]


def pick_list_frame(orders: Sequence[PickListOrder]) -> pd.DataFrame:
    rows: List[Dict] = []
    for order in orders:
        for item in order.items:
            rows.append(
                {
                    "order_number": order.order_number,
                    "name": item.display_name,
                    "location": item.location,
                    "image": item.image_address,
                }
            )
    return pd.DataFrame(rows, columns=PICK_LIST_COLUMNS)


def write_pick_list_csv(orders: Sequence[PickListOrder], path: Path) -> Path:
    df = pick_list_frame(orders)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info("Pick list CSV written to {} ({} rows)", path, len(df))
    return path
