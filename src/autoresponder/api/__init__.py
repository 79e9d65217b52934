"""API layer: file import/export surface for rule lists.

The export format is a bare JSON array of rule records (camelCase keys),
the same shape the engine persists, so files exported by the browser
extension can be imported unchanged.
"""
