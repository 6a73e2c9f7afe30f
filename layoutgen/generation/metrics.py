from typing import Dict


def init_metrics() -> Dict[str, int | float | bool | dict]:
    return {
        'rooms_scattered': 0,
        'settle_ticks': 0,
        'rooms_selected': 0,
        'triangles': 0,
        'triangulation_edges': 0,
        'triangulation_failed': False,
        'mst_edges': 0,
        'mst_weight': 0.0,
        'settle_timeout': False,
        'runtime_ms': 0,
        'phase_ms': {},
    }
