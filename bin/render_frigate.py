#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import sys
from frigate_container.assembler import assemble, write_artifacts
from frigate_container.config.loader import load_and_validate
from frigate_container.util.logging import setup_logger

def main():
    # config/frigate.yml + config/.env, artifacts into ./build
    setup_logger("frigate_container")
    opts = load_and_validate()
    write_artifacts(assemble(opts, "build"))
    return 0

if __name__ == "__main__":
    sys.exit(main() or 0)
