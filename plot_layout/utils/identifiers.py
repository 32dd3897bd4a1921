"""
Instance identifier helpers.

Static layouts derive ids from (plot id, blueprint id, blueprint version,
structural path) so that a unit keeps its id across regenerations of the same
blueprint version. Dynamic layouts have no versioned identity and mint random
ids on every call.
"""
from typing import Optional
import uuid


# Fixed namespace so ids are reproducible across processes and releases
INSTANCE_ID_NAMESPACE = uuid.UUID("6f1c2b8e-3d4a-5b6c-9e7f-0a1b2c3d4e5f")

# Stand-in for "no plot" so that an absent plot id never collides with a real one
_NO_PLOT = "\x00no-plot"


def make_instance_id(
    plot_id: Optional[str],
    blueprint_id: str,
    blueprint_version: int,
    path: str,
) -> str:
    """
    Derive the stable id of a node instance.

    Args:
        plot_id: Owning plot, or None for a plot-independent preview
        blueprint_id: Blueprint identifier
        blueprint_version: Published blueprint version
        path: Structural path, e.g. ``root/r0c1``

    Returns:
        UUIDv5 string, identical for identical inputs
    """
    key = "|".join([
        _NO_PLOT if plot_id is None else plot_id,
        blueprint_id,
        str(blueprint_version),
        path,
    ])
    return str(uuid.uuid5(INSTANCE_ID_NAMESPACE, key))


def mint_ephemeral_id() -> str:
    """Random id for dynamically generated nodes; unique per call."""
    return str(uuid.uuid4())


def join_path(parent: str, step: str) -> str:
    return f"{parent}/{step}"
