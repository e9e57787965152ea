import logging
import os
import sys

# Ensure src/ is on path when running as a script
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tourplan.config import get_log_level, get_port, get_solver_config
from tourplan.server import create_app

logging.basicConfig(level=get_log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app(solver_config=get_solver_config())


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=get_port(), debug=False)
