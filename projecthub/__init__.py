"""ProjectHub: project membership, authorization and reporting backend."""
