"""
Integration engine: Gauss-Legendre quadrature, mixed analytic/numeric
integrals and the registry of composite integration codes.
"""
