"""
Domain services for Training Hub.

- unit_of_work: explicit transaction scope for multi-statement writes
- hierarchy: flattened join rows to nested course trees
- course_service: course CRUD and the course aggregate reader/writer
"""
