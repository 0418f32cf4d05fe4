"""Namespace for dynamic DNS support; it holds no modules yet."""