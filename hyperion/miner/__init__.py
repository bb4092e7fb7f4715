"""Solo miner that works on block templates served by a node."""