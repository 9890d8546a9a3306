raise RuntimeError("subpackage failed at import")
