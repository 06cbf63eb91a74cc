import numpy as np

MOMENT_ORDERS = ((1, 1), (1, 2), (2, 1), (2, 2))
SUB_FEATURE_SIZE = len(MOMENT_ORDERS) + 1


def shannon_entropy(distribution: np.ndarray) -> float:
    """Shannon entropy -sum(p log p) in nats, with 0 log 0 = 0."""
    p = np.asarray(distribution, dtype=np.float64).ravel()
    p = p[p > 0]
    return float(-np.sum(p * np.log(p)))


def central_moments(matrix: np.ndarray) -> np.ndarray:
    """
    Compute the sub-feature of one distribution matrix.

    Bin indices are 1-based. The matrix is normalized to sum 1 first, so raw
    counts and densities give the same result.

    Args:
        matrix: (bins, bins) distribution matrix

    Returns:
        np.ndarray: (M11, M12, M21, M22, E); all zeros for an empty matrix
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    total = matrix.sum()
    if total <= 0:
        return np.zeros(SUB_FEATURE_SIZE)
    p = matrix / total

    i = np.arange(1, p.shape[0] + 1, dtype=np.float64)[:, None]
    j = np.arange(1, p.shape[1] + 1, dtype=np.float64)[None, :]
    mean_i = np.sum(i * p)
    mean_j = np.sum(j * p)
    di = i - mean_i
    dj = j - mean_j

    features = [np.sum(di ** a * dj ** b * p) for a, b in MOMENT_ORDERS]
    features.append(shannon_entropy(p))
    return np.array(features)
