"""SQL migration runner package.

Applies the `.sql` files of a directory to a database in filename
order. `services` holds the runner, `database` the engine and executor,
and `utils` the discovery and error-classification helpers.
"""
