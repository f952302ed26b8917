"""
Training Doctrine (FINAL)

Exactly one training paradigm is supported here:
Batch Gradient Descent Linear Regression.

------------------------------------------------------------
Definition
------------------------------------------------------------
- TrainingUnit = one RegressionDataset (finite, in memory)
- Model        = y = W x + b, W is T x N
- Optimizer    = batch (or mini-batch) gradient descent on MSE

------------------------------------------------------------
Semantics
------------------------------------------------------------
- Each run operates on a CLOSED, FINITE dataset.
- The caller's dataset is never mutated.
- A held-out validation subset only decides when to stop,
  it never contributes to the gradient.
- Runs are reproducible: all randomness comes from an explicit
  generator seeded by TrainingConfig.seed.

------------------------------------------------------------
Non-goals
------------------------------------------------------------
- Classification
- Multiple model families / engine registries
- Online or incremental training
"""
