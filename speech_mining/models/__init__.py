"""
Model definitions for passage classification.

This subpackage contains the linear SVM wrapper exposing the
train(features, labels, cost) and predict(model, features) operations.
"""
