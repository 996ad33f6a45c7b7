"""Run the hospital admin API locally.

Usage:
    python run.py
    PORT=5050 python run.py

If a ./venv exists and we were started with another interpreter, the
script re-executes itself inside the venv first.
"""

import os
import subprocess
import sys

_project_dir = os.path.dirname(os.path.abspath(__file__))
_venv_python = os.path.join(_project_dir, "venv", "bin", "python")

if os.path.exists(_venv_python) and os.path.realpath(sys.executable) != os.path.realpath(_venv_python):
    print("[run.py] Re-running with venv/bin/python")
    try:
        sys.exit(subprocess.call([_venv_python] + sys.argv))
    except KeyboardInterrupt:
        sys.exit(0)

from dotenv import load_dotenv

load_dotenv()  # .env must be loaded before config classes read os.environ

from hospital_admin import create_app

app = create_app()  # FLASK_ENV picks the config, default development

if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
