import argparse
import logging
import sys

from launchmeta.common import Layout, data_path
from launchmeta.errors import AcquisitionError
from launchmeta.instance import InstanceOrchestrator, JsonInstanceStore
from launchmeta.manifest import ManifestClient
from launchmeta.model.mojang import JarType


def main(argv=None):
    parser = argparse.ArgumentParser(description="Download a version and create an instance for it.")
    parser.add_argument("version", nargs="?", help="version id, e.g. 1.20.1 (defaults to the latest release)")
    parser.add_argument("name", nargs="?", help="instance name (defaults to the version id)")
    parser.add_argument("--data-dir", default=data_path())
    parser.add_argument("--server", action="store_true", help="use the server jar instead of the client jar")
    parser.add_argument("--list", action="store_true", help="list available versions and exit")
    parser.add_argument("--snapshots", action="store_true", help="include snapshots when listing")
    parser.add_argument("--refresh", action="store_true", help="download the java runtime index again")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    layout = Layout(args.data_dir)
    client = ManifestClient(layout)
    store = JsonInstanceStore(layout)

    try:
        index = client.load_version_manifest()
        if args.list:
            for version_id in client.version_ids(show_snapshots=args.snapshots):
                print(version_id)
            return 0

        version_id = args.version or (index.latest.release if index.latest else None)
        if version_id is None:
            parser.error("no version given and the manifest has no latest release")
        name = args.name or version_id
        if args.refresh:
            client.fetch_java_index(refresh=True)
        jar_type = JarType.Server if args.server else JarType.Client

        config = InstanceOrchestrator(client, store).create_instance(version_id, name, jar_type)
    except AcquisitionError as e:
        logging.getLogger(__name__).error("%s", e)
        return 1

    print(f"Created instance {config.instance_name} at {store.path(config.instance_name)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
