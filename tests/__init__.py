"""
Tiny Planet Test Suite

Structure:
- unit/: resampling core, Street View client/orchestrator, store, config
- integration/: render pipeline, CLI and HTTP API against a fake tile server
"""
