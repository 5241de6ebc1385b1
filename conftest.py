def pytest_addoption(parser):
    """Register the probe script's CLI options so `pytest scripts/probe_cipherlink.py --origin ...` won't fail.

    This makes pytest accept the script's command-line flags (best-effort). It does not execute the script's main
    automatically.
    """

    # Helper to safely add options without causing conflicts if already registered
    def safe_addoption(*args, **kwargs):
        try:
            parser.addoption(*args, **kwargs)
        except ValueError:
            # Option already registered, skip
            pass

    safe_addoption("--plan", action="store", help="Bootstrap plan JSON (script flag)")
    safe_addoption("--origin", action="append", help="Candidate origin (script flag)")
    safe_addoption("--call-categories", action="store_true", help="Make one signed call (script flag)")
