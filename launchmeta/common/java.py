from os.path import join

JAVA_DIR = "java"

JAVA_MANIFEST_FILE = join(JAVA_DIR, "all.json")

JAVA_MANIFEST_URL = "https://piston-meta.mojang.com/v1/products/java-runtime/2ec0cc96c44e5a76b9c8b7c39df7210883d12871/all.json"

JAVA_EXECUTABLES = ("bin/java", "bin/java.exe")
EXECUTABLE_MODE = 0o775
