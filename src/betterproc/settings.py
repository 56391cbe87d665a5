from __future__ import annotations
import os

PROCFILE = os.environ.get("BETTERPROC_PROCFILE", "Procfile")
SHELL = os.environ.get("BETTERPROC_SHELL", "sh")
ENCODING = os.environ.get("BETTERPROC_ENCODING", "utf-8")

# reserved overlay key naming the working directory
CWD_KEY = "cwd"
