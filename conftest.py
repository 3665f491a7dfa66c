"""Root conftest: loads the testkit pytest plugin for the whole suite."""

pytest_plugins = ["conduit_testkit.testing.plugin", "pytester"]
