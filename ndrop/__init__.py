"""ndrop event networking backend."""
