import os
import subprocess
import sys

import tasktrack


def test_package_import_does_not_build_an_app():
    assert not hasattr(tasktrack, "app")
    assert not hasattr(tasktrack, "create_app")


def test_importing_submodules_leaves_main_unloaded():
    src = os.path.dirname(os.path.dirname(os.path.abspath(tasktrack.__file__)))
    env = {**os.environ, "PYTHONPATH": src}
    code = "import sys, tasktrack.utils, tasktrack.db; print('tasktrack.main' in sys.modules)"
    out = subprocess.run([sys.executable, "-c", code], env=env, capture_output=True, text=True, check=True)
    assert out.stdout.strip() == "False"
