# SPDX-License-Identifier: Apache-2.0
"""Health endpoint."""
from fastapi import APIRouter

from ohmage import __version__

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    """Liveness/readiness."""
    return {"status": "ok", "version": __version__}
