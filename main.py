"""Entry point for the Farm Assistant front-end.

Thin wrapper so that ``python main.py`` (or the ``farm-assistant`` console
script) runs ``streamlit run app/app.py`` regardless of the working directory.
"""
import sys
from pathlib import Path

from streamlit.web import cli as stcli

APP_SCRIPT = Path(__file__).resolve().parent / "app" / "app.py"


def run():
    sys.argv = ["streamlit", "run", str(APP_SCRIPT), *sys.argv[1:]]
    sys.exit(stcli.main())


if __name__ == "__main__":
    run()
