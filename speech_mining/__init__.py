"""
Top-level package for text analysis of presidential speeches.

This package contains modules for:
- loading the speech corpus and annotated passages
- text preprocessing and document-term matrix construction
- frequency analysis and key term extraction
- the linear SVM used for passage classification
- k-fold cross-validation and the cost parameter sweep
- evaluation metrics and shared helper functions
"""
