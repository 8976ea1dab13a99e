import sys
import os

# Add the service directory to sys.path
# This allows pytest to find modules such as lifecycle.py and models.py
service_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'chat_service'))
if service_root not in sys.path:
    sys.path.insert(0, service_root)
