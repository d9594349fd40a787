# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - TEST SUITE
# =============================================================================
#
# Struktur:
#   tests/
#     unit/           - Unit Tests (config, models, client, store, telegram,
#                       reconciler, scheduler)
#     integration/    - CLI wiring (main.py) with mocked externals
#
# Usage:
#   pytest tests/
#   pytest tests/unit/
#
# =============================================================================
