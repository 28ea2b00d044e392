"""
Classification pipelines.

This subpackage provides:
- stride-based k-fold cross-validation and the cost parameter sweep
- the end-to-end pipeline that trains the final classifier and labels
  the speech corpus.
"""
