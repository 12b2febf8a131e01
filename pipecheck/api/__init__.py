"""Unified API layer for pipecheck.

The shared functions that chat handlers, protocol servers and the CLI
consume, so every interface reports the same results.

Usage
-----
::

    from pipecheck import api

    result = api.validation.check_pipeline(pipeline_text)
    if not result["valid"]:
        print(result["errors"])

Available submodules
--------------------
- validation: Auto-fix plus validation, optionally with the external validator
- components: Component schemas and the Bloblang reference
"""

from pipecheck.api import components, validation

__all__ = ["components", "validation"]
