from dockerpipe import commands


def test_build_command_includes_platform_dockerfile_and_tag(make_config):
    cfg = make_config(platform="linux/arm64", dockerfile="docker/Dockerfile.prod")

    command = commands.build_command(cfg)

    assert command.startswith("docker build --platform linux/arm64")
    assert "-f docker/Dockerfile.prod" in command
    assert command.endswith("-t myapp:v7 .")


def test_build_command_renders_each_build_arg_once(make_config):
    cfg = make_config(build_args={"VERSION": "1.0.0", "ENV": "prod", "GIT_HASH": "abc123"})

    command = commands.build_command(cfg)

    for arg in ("--build-arg VERSION=1.0.0", "--build-arg ENV=prod", "--build-arg GIT_HASH=abc123"):
        assert command.count(arg) == 1
    assert command.count("--build-arg") == 3


def test_transfer_command_pipes_save_gzip_load(make_config):
    command = commands.transfer_command(make_config(ssh_key="key.pem"))

    assert command == "docker save myapp:v7 | gzip | ssh -i key.pem deploy@example.com docker load"


def test_deploy_command_minimal(make_config):
    command = commands.deploy_command(make_config())

    assert command == (
        'ssh deploy@example.com "docker stop myapp || true && docker rm myapp || true && '
        'docker run -d --name myapp --restart unless-stopped -p 80:3000 myapp:v7"'
    )


def test_deploy_command_with_optional_settings(make_config):
    cfg = make_config(
        network="backend",
        cpus="0.5",
        memory="512m",
        volumes=("/srv/data:/data", "/srv/logs:/logs"),
        env_file=".env",
    )

    command = commands.deploy_command(cfg)

    assert "--network backend" in command
    assert "--cpus 0.5" in command
    assert "--memory 512m" in command
    assert "-v /srv/data:/data" in command
    assert "-v /srv/logs:/logs" in command
    assert "--env-file ~/.env myapp:v7" in command


def test_verify_command_filters_by_name(make_config):
    assert commands.verify_command(make_config()) == (
        "ssh deploy@example.com \"docker ps --filter name=myapp --format '{{.Status}}'\""
    )


def test_release_commands(make_config):
    cfg = make_config()

    assert commands.list_release_tags_command(cfg) == (
        "ssh deploy@example.com \"docker images 'myapp' --format '{{.Tag}}'\""
    )
    assert commands.remove_release_command(cfg, "v1") == 'ssh deploy@example.com "docker rmi myapp:v1"'


def test_rollback_query_commands(make_config):
    cfg = make_config()

    assert commands.current_image_command(cfg) == (
        "ssh deploy@example.com \"docker inspect --format='{{.Config.Image}}' myapp\""
    )
    assert commands.image_history_command(cfg) == (
        "ssh deploy@example.com \"docker images myapp --format "
        "'{{.Repository}}:{{.Tag}}___{{.CreatedAt}}'\""
    )


def test_swap_command_backs_up_by_renaming(make_config):
    command = commands.swap_command(make_config(env_file=".env"), "myapp:v6")

    assert command == (
        'ssh deploy@example.com "docker stop myapp && docker rename myapp myapp_backup && '
        'docker run -d --name myapp --restart unless-stopped -p 80:3000 --env-file ~/.env myapp:v6"'
    )


def test_restore_command_tolerates_missing_live_container(make_config):
    assert commands.restore_command(make_config()) == (
        'ssh deploy@example.com "docker stop myapp || true && docker rm myapp || true && '
        'docker rename myapp_backup myapp && docker start myapp"'
    )


def test_remove_backup_command(make_config):
    assert commands.remove_backup_command(make_config()) == 'ssh deploy@example.com "docker rm myapp_backup"'
