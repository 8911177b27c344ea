## @file translation.py
## @brief Logical-to-physical placement state for a cluster of nodes.
## @details Two levels of mapping decide where a write lands:
## 1. Within a node, a logical page is shifted by the node's intra-node offset
##    (see memory_model.physical_index).
## 2. Across the cluster, write sets rotate between nodes: node n runs
##    write set (n + node_shift) mod node_count.
## Both are changed only by a remap.

from typing import List


class ClusterState:
    ##
    # @brief Round-robin assignment of write sets to nodes.
    ##
    def __init__(self, node_count: int) -> None:
        if node_count <= 0:
            raise ValueError(f"node count must be positive, got {node_count}")
        self.node_count = node_count
        self.node_shift = 0

    def assigned_write_set(self, node: int) -> int:
        return (node + self.node_shift) % self.node_count

    def rotate(self) -> None:
        # Once per remap, not once per node
        self.node_shift = (self.node_shift + 1) % self.node_count


class AddressTranslator:
    ##
    # @brief Tracks every node's current offset and the cluster rotation.
    #
    # The remap scheduler is the only writer; the simulation engine reads it to
    # place each pass of writes.
    ##
    def __init__(self, node_count: int, memory_page_count: int) -> None:
        self.memory_page_count = memory_page_count
        self.cluster = ClusterState(node_count)
        self.intra_node_offsets: List[int] = [0] * node_count

    @property
    def node_count(self) -> int:
        return self.cluster.node_count

    def write_set_for(self, node: int) -> int:
        return self.cluster.assigned_write_set(node)

