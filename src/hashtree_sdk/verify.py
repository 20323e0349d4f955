import logging
from typing import Any, Dict, Optional, Union

from hashtree_core.errors import MerkleError
from hashtree_core.models import ProofDocument
from hashtree_core.proof import check_proof

log = logging.getLogger(__name__)


def verify_document(
    doc_json: Union[Dict[str, Any], str, bytes],
    root_hex: Optional[str] = None,
    key: Optional[bytes] = None,
) -> bool:
    """Return True if the proof document replays to its root.

    Without `root_hex` the document's own `root` field is trusted, which only
    shows the proof is internally consistent. Pass the externally known root
    (e.g. from a published tree head) to check actual inclusion. `key` is the
    BLAKE2b key for keyed trees.
    """
    try:
        doc = ProofDocument.from_json(doc_json)
        root = bytes.fromhex(root_hex if root_hex is not None else doc.root)
        check_proof(root, doc.to_proof(), doc.tree_config(key))
    except (MerkleError, ValueError) as e:
        log.info("proof document rejected: %s", e)
        return False
    return True
