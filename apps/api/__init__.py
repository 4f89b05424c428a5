"""
HTTP surface of the two-factor service.

`apps.api.main.app` builds the application on import, so this package
exports nothing itself; test and tooling imports of `apps.api.routes` or
`apps.api.wiring` stay free of startup side effects.
"""
