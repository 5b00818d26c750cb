"""
Command-line entrypoints, generated from functions decorated with `utils.entrypoint`.
"""
