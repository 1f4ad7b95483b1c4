# This file makes the services directory a Python package
