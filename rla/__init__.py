"""
rla: reverse an Android APK into an editable project and pack it back.

An APK is unpacked into a project directory holding its disassembled smali,
optionally a jadx source tree and a git history. The project is later packed
into a new debug-signed APK.
"""

__version__ = "0.3.0"
__author__ = "rla contributors"
