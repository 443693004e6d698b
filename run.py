"""
Entry Point Script (Bootstrap)
==============================
Runs the demo from a source checkout without installing the package.

It is located outside the 'src' package and puts 'src' on 'sys.path' so that
imports like 'from resolutionmodels.models...' resolve.

Usage:
    $ python run.py
"""
import sys
import os

current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from resolutionmodels.__main__ import main

if __name__ == "__main__":
    main()
