import shorinstall

if __name__ == '__main__':
	shorinstall.run_as_a_module()
