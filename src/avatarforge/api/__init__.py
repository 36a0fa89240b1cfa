"""HTTP surface and console entry points.

- **main.py**: FastAPI application factory, routes, ``main()`` and ``trim_main()``
- **models.py**: Pydantic request and response models
- **services.py**: Per-process wiring of cache, generators and handlers
"""
