"""
配置系统单元测试

测试配置模型验证、加载器功能和默认值。
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from relpack.config.loader import (
    ConfigError,
    ConfigLoader,
    ConfigValidationError,
    default_config,
    load_config,
    save_config,
    validate_config,
)
from relpack.config.schema import (
    ArchiveFormat,
    ArchiveTargetModel,
    Platform,
    PlatformsModel,
    ProductModel,
    RelpackConfig,
    ToolsModel,
)


class TestPlatform:
    """Platform 测试"""

    @pytest.mark.parametrize("value,expected", [
        ("mac", Platform.MAC),
        ("osx", Platform.MAC),
        ("OSX", Platform.MAC),
        ("lin", Platform.LINUX),
        ("win", Platform.WINDOWS),
        ("sol", Platform.SOLARIS),
        ("all", Platform.ALL),
        (Platform.LINUX, Platform.LINUX),
    ])
    def test_parse(self, value, expected):
        """测试平台名称和别名解析"""
        assert Platform.parse(value) == expected

    def test_parse_unknown(self):
        """测试未知平台"""
        with pytest.raises(ValueError):
            Platform.parse("amiga")


class TestModels:
    """配置模型测试"""

    def test_defaults(self):
        """测试默认配置"""
        config = RelpackConfig(product=ProductModel(name="demo"))

        assert config.product.version_file == Path("package.json")
        assert config.platforms.prebuilt_marker == "node-builds"
        assert config.platforms.keep_markers == ["tmp", "etc"]
        assert config.installer.enabled
        assert config.installer.doc_names == ["README", "LICENSE"]
        assert config.files.noise_prefixes == ["Entering "]
        assert config.tools.zip_level == 9
        assert [(a.target, a.platform, a.format) for a in config.archives] == [
            ("all", Platform.ALL, ArchiveFormat.TAR_GZ),
            ("mac", Platform.MAC, ArchiveFormat.TAR_GZ),
            ("linux", Platform.LINUX, ArchiveFormat.TAR_GZ),
            ("windows", Platform.WINDOWS, ArchiveFormat.ZIP),
            ("solaris", Platform.SOLARIS, ArchiveFormat.TAR_GZ),
        ]

    def test_artifact_names(self):
        """测试产物命名"""
        config = RelpackConfig(product=ProductModel(name="cocos2d-javascript"))
        assert config.artifact_name("0.1.0", "mac") == "cocos2d-javascript-v0.1.0-mac"
        assert config.installer_name("0.1.0") == "cocos2d-javascript-v0.1.0-windows-installer.exe"

    def test_installer_name_override(self):
        """测试自定义安装器文件名"""
        config = RelpackConfig(product={"name": "demo"}, installer={"output_name": "setup.exe"})
        assert config.installer_name("1.0") == "setup.exe"

    def test_output_dir_defaults_to_root(self, tmp_path):
        """测试输出目录默认为打包根目录"""
        config = RelpackConfig(product={"name": "demo"}, root=tmp_path)
        assert config.get_output_dir() == tmp_path

        config.output_dir = tmp_path / "dist"
        assert config.get_output_dir() == tmp_path / "dist"

    def test_product_name_without_separators(self):
        """测试产品名称不能包含路径分隔符"""
        with pytest.raises(ValidationError):
            ProductModel(name="a/b")

    def test_duplicate_targets(self):
        """测试归档目标重复"""
        with pytest.raises(ValidationError):
            RelpackConfig(
                product={"name": "demo"},
                archives=[
                    {"target": "mac", "platform": "mac"},
                    {"target": "mac", "platform": "osx", "format": "zip"},
                ],
            )

    def test_archive_platform_alias(self):
        """测试归档目标中的平台别名"""
        target = ArchiveTargetModel(target="osx-bundle", platform="osx", format="tar.gz")
        assert target.platform == Platform.MAC
        assert target.format == ArchiveFormat.TAR_GZ

    def test_keywords_with_alias_keys(self):
        """测试关键字映射使用别名作为键"""
        model = PlatformsModel(keywords={"osx": "darwin", "linux": "linux"})
        assert model.keywords == {Platform.MAC: "darwin", Platform.LINUX: "linux"}

    def test_keyword_for_all_rejected(self):
        """测试 all 不能配置关键字"""
        with pytest.raises(ValidationError):
            PlatformsModel(keywords={"all": "x"})

    @pytest.mark.parametrize("target", ["linux/x64", "win\\x64", "..", "../outside"])
    def test_target_cannot_escape_output_dir(self, target):
        """测试归档目标不能包含路径分隔符或 .."""
        with pytest.raises(ValidationError):
            ArchiveTargetModel(target=target, platform="linux")

    @pytest.mark.parametrize("field,value", [
        ("version", "1.0/../../x"),
        ("name", "demo.."),
    ])
    def test_product_fields_cannot_escape_output_dir(self, field, value):
        data = {"name": "demo", field: value}
        with pytest.raises(ValidationError):
            ProductModel(**data)

    def test_installer_output_name_without_separators(self):
        with pytest.raises(ValidationError):
            RelpackConfig(product={"name": "demo"}, installer={"output_name": "../setup.exe"})

    def test_archive_platform_needs_keyword(self):
        """测试归档平台在 keywords 中缺少关键字时验证失败"""
        with pytest.raises(ValidationError, match="linux"):
            RelpackConfig(
                product={"name": "demo"},
                platforms={"keywords": {"mac": "osx", "windows": "win"}},
                archives=[{"target": "mac", "platform": "mac"}, {"target": "linux", "platform": "linux"}],
            )

    def test_installer_needs_windows_keyword(self):
        """测试启用安装器时需要 windows 关键字"""
        archives = [{"target": "mac", "platform": "mac"}]
        with pytest.raises(ValidationError, match="windows"):
            RelpackConfig(product={"name": "demo"}, platforms={"keywords": {"mac": "osx"}}, archives=archives)

        config = RelpackConfig(
            product={"name": "demo"},
            platforms={"keywords": {"mac": "osx"}},
            archives=archives + [{"target": "all", "platform": "all"}],
            installer={"enabled": False},
        )
        assert [a.target for a in config.archives] == ["mac", "all"]

    def test_zip_level_range(self):
        """测试 zip 压缩级别范围"""
        with pytest.raises(ValidationError):
            ToolsModel(zip_level=10)

    def test_extra_fields_forbidden(self):
        """测试禁止未知字段"""
        with pytest.raises(ValidationError):
            RelpackConfig(product={"name": "demo"}, compression={"level": 3})

    def test_unsupported_schema_version(self):
        """测试不支持的配置版本"""
        with pytest.raises(ValidationError):
            RelpackConfig(product={"name": "demo"}, config={"version": 2})

    def test_to_dict_is_plain(self):
        """测试转换为只包含基本类型的字典"""
        data = RelpackConfig(product={"name": "demo"}).to_dict()
        assert data["root"] == "."
        assert data["platforms"]["keywords"]["mac"] == "osx"
        assert data["archives"][3] == {"target": "windows", "platform": "windows", "format": "zip"}


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_resolves_paths_relative_to_config(self, tmp_path):
        """测试相对路径相对于配置文件目录解析"""
        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        config_path = config_dir / "relpack.yaml"
        config_path.write_text(
            "product:\n"
            "  name: demo\n"
            "root: ../src\n"
            "output_dir: out\n"
            "installer:\n"
            "  template: installer.template\n"
            "archives:\n"
            "  - target: mac\n"
            "    platform: osx\n",
            encoding="utf-8",
        )

        config = load_config(config_path)
        assert config.root == (tmp_path / "src").resolve()
        assert config.output_dir == (config_dir / "out").resolve()
        assert config.installer.template == (config_dir / "installer.template").resolve()
        assert [a.target for a in config.archives] == ["mac"]

    def test_root_defaults_to_config_dir(self, tmp_path):
        """测试未指定 root 时使用配置文件所在目录"""
        config_path = tmp_path / "relpack.yml"
        config_path.write_text("product:\n  name: demo\n", encoding="utf-8")
        assert load_config(config_path).root == tmp_path.resolve()

    def test_missing_file(self, tmp_path):
        """测试配置文件不存在"""
        with pytest.raises(ConfigError, match="不存在"):
            load_config(tmp_path / "missing.yaml")

    def test_wrong_suffix(self, tmp_path):
        """测试扩展名错误"""
        path = tmp_path / "relpack.json"
        path.write_text("{}")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_empty_file(self, tmp_path):
        """测试空配置文件"""
        path = tmp_path / "relpack.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="为空"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        """测试根级别不是字典"""
        path = tmp_path / "relpack.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_yaml_syntax_error(self, tmp_path):
        """测试 YAML 语法错误"""
        path = tmp_path / "relpack.yaml"
        path.write_text("product: [unclosed\n")
        with pytest.raises(ConfigError, match="YAML"):
            load_config(path)

    def test_validation_error(self, tmp_path):
        """测试验证错误的格式化"""
        path = tmp_path / "relpack.yaml"
        path.write_text("product:\n  name: demo\ntools:\n  zip_level: 42\n")

        with pytest.raises(ConfigValidationError) as excinfo:
            load_config(path)
        assert "tools -> zip_level" in excinfo.value.format_errors()
        assert "zip_level" in excinfo.value.format_errors_json()

    def test_nested_archive_target_rejected(self, tmp_path):
        """测试配置文件中带子目录的归档目标在加载时被拒绝"""
        path = tmp_path / "relpack.yaml"
        path.write_text(
            "product:\n  name: demo\n"
            "archives:\n  - target: linux/x64\n    platform: linux\n"
        )

        with pytest.raises(ConfigValidationError) as excinfo:
            load_config(path)
        assert "archives -> 0 -> target" in excinfo.value.format_errors()

    def test_validate_config(self, tmp_path):
        """测试 validate_config 返回错误列表"""
        good = tmp_path / "good.yaml"
        good.write_text("product:\n  name: demo\n")
        bad = tmp_path / "bad.yaml"
        bad.write_text("product: {}\n")

        assert validate_config(good) == []
        assert validate_config(bad)
        assert validate_config(tmp_path / "missing.yaml")[0]["type"] == "config_error"

    def test_save_and_load(self, tmp_path):
        """测试保存的配置可以重新加载"""
        path = tmp_path / "saved.yaml"
        save_config(RelpackConfig(product={"name": "demo"}, files={"exclude": ["*.log"]}), path)

        config = ConfigLoader().load_from_file(path)
        assert config.product.name == "demo"
        assert config.files.exclude == ["*.log"]
        assert config.root == tmp_path.resolve()

    def test_load_from_dict_does_not_modify_input(self, tmp_path):
        """测试 load_from_dict 不修改输入字典"""
        data = {"product": {"name": "demo"}, "root": "src"}
        ConfigLoader().load_from_dict(data, base_path=tmp_path)
        assert data == {"product": {"name": "demo"}, "root": "src"}

    def test_default_config(self, tmp_path):
        """测试默认配置使用目录名作为产品名"""
        root = tmp_path / "my-lib"
        root.mkdir()
        assert default_config(root).product.name == "my-lib"
        assert default_config(root, "other").product.name == "other"
        assert default_config(root).root == root.resolve()
