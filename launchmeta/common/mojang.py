from os.path import join

VERSIONS_DIR = "versions"
LIBRARIES_DIR = "libraries"
ASSETS_DIR = "assets"
ASSET_INDEXES_DIR = join(ASSETS_DIR, "indexes")
ASSET_OBJECTS_DIR = join(ASSETS_DIR, "objects")
LOGGING_DIR = "logging"
INSTANCES_DIR = "instances"

VERSION_MANIFEST_FILE = "version_manifest_v2.json"
INSTANCE_FILE = "instance.json"
NATIVES_DIR = "natives"

VERSION_MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"
RESOURCES_URL = "https://resources.download.minecraft.net/%s/%s"
