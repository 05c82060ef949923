# src/world/__init__.py
"""
World collaborators consumed by the bridge.

- protocols: WorldQuery, BlockEditor, AgentBody, VoxelTypeRegistry,
  PhotoCapture, Observer
- grid.VoxelGrid: in-memory voxel world with voxel-traversal raycast
- registry.InMemoryVoxelTypeRegistry: type catalog with change events
- testing.fakes: fakes for unit tests
"""
