import os

# Qt must not open windows during tests.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
