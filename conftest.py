# Ensure tests import the `webproxy` package from this checkout first,
# even when it has not been installed into the environment.
import os
import sys

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)
