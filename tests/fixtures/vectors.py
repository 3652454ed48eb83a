"""Vector helpers shared by the RAG tests."""


def unit_vector(index: int = 0, dimensions: int = 768) -> list[float]:
    values = [0.0] * dimensions
    values[index] = 1.0
    return values
